"""Weather lookup and saved weather logs."""
