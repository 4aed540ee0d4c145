"""Command line view for symtree."""
