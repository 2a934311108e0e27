"""Form validation rules."""
