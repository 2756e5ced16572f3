"""YAML declarations: interface shapes and compatibility matrices per module."""
