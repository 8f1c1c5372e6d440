# HTTP API for the MHTML parsing service
