"""Push-to-talk speech-to-speech translation."""
