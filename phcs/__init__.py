"""Pet Help Case System backend."""
