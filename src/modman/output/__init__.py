"""Output layer — turns ServiceResult into human (Rich) or JSON text."""
