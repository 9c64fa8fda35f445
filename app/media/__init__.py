"""
Media app for chat blob uploads.

This app provides:
- Blob storage backends (local Django storage, S3) behind one interface
- Upload target issuance (presigned S3 PUT, or signed local upload URL)
- The local upload receiver

Chat messages and group images store the blob reference issued here; the
reference is resolved to a URL only when read.
"""
