"""Container sniffing from leading magic bytes."""

_MPEG_SYNC_MASK = 0xFFE0


def detect_container(audio_bytes: bytes) -> str | None:
    """
    Return "wav", "ogg" or "mp3" based on the header, or None if the
    leading bytes match none of them.
    """
    head = audio_bytes[:12]
    if len(head) >= 12 and head[:4] == b"RIFF" and head[8:12] == b"WAVE":
        return "wav"
    if head[:4] == b"OggS":
        return "ogg"
    if head[:3] == b"ID3":
        return "mp3"
    # Bare MPEG audio frame: 11 sync bits set, layer bits non-zero
    if len(head) >= 2:
        word = (head[0] << 8) | head[1]
        if word & _MPEG_SYNC_MASK == _MPEG_SYNC_MASK and (head[1] & 0x06) != 0:
            return "mp3"
    return None
