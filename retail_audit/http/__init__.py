"""HTTP plumbing: problem+json rendering and request correlation."""
