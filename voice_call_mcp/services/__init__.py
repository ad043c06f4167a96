"""External collaborators (Twilio, ngrok) and the handle cache that owns them."""
