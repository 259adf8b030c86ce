"""Token wire codec, claim validators and the token entity."""
