"""Domain services: catalog access, scoring, ranking and copy generation."""
