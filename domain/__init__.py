"""Domain layer: quota enforcement rules, events and errors."""
