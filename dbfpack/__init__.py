"""
# dbfpack: dBASE files as chunks of fields.

A binary file format is described declaratively: a Chunk is a class whose
attributes are the fields, in the order they appear in the file, and each
field knows its size and how to encode its value.

Two operations are defined for the file format and its sub components:

 1. relayout(): trigger a recursive layout "negotiation" between a component
    and its subcomponents so to have offset and size set in the correct way.

 2. pack(): encode the high-level representation into binary data, writing
    each field at its offset. If not indicated explicitly a packing also
    implies a relayouting.

If we define a "field" as something with "direct representation" and without
subcomponents we can see that the relayouting doesn't impact on it.

The dBASE table format lives in dbfpack.dbf, the entry point is
dbfpack.dbf.encode().
"""
