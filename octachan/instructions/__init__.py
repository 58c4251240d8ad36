"""Pure instruction semantics, one function per operation."""
