"""HTTP routes exposing the device session."""
