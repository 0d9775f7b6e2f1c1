"""Reply and data contracts shared by the engine and the request server."""
