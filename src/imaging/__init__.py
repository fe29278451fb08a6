"""Image decoding and detector input preparation."""
