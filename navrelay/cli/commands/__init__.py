"""navrelay CLI subcommands."""
