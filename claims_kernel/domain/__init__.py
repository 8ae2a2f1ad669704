"""Pure domain layer of the claims kernel: value objects, clock, workflow."""
