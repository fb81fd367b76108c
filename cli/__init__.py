"""ChainMuse command-line interface."""
