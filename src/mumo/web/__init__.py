"""HTTP surface for the Mumo content engine."""
