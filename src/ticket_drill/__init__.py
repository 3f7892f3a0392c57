"""Practice sessions of true/false statement tickets."""
