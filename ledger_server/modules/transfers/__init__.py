"""Administrator transfer and adjustment engine. See :mod:`.service`."""
