"""Box geometry and coordinate remapping."""
