"""Infrastructure layer — filesystem inspection, symlinks, scripts, manifests.

Infrastructure may import from domain, never from services or commands.
"""
