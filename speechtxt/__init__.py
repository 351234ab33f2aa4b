# speechtxt/__init__.py
# ======================
# Speech-to-Text upload service
#
# Layers:
#   - audio/    Format normalization + channel downmix (pure transforms)
#   - stt/      Google Cloud Speech adapter
#   - storage/  Google Cloud Storage adapter
#   - db/       SQLite persistence
#   - api/      FastAPI HTTP surface
#
# The pipeline module wires them together per request.
