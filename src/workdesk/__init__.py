"""Personal task/notes workspace client."""
