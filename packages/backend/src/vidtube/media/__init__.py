"""Media handling — temp upload spooling and the media host."""
