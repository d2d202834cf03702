"""Width primitives backends and the numeric-kind resolver."""
