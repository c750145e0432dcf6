"""Opcode handlers, one module per instruction family."""
