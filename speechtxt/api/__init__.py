# speechtxt/api/__init__.py
# ==========================
# API Layer
#
#   POST /speechtotext          multipart: audio, email, title
#   GET  /speechtotext/{email}  transcriptions by submitter
#
# Collaborators are built once at startup (see services.py) and shared
# through app.state.services.
