"""Payment gateway integration: orders, client verification and webhooks."""
