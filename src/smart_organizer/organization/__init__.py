"""Planning, validation, and execution of organize actions."""
