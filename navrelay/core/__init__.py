"""navrelay core — geometry codec, envelope bus, publisher and relay wiring."""
