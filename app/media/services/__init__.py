"""Media services: blob storage for chat attachments and group images."""
