from rich.pretty import pprint

import xflag

__prog__ = "copy"

verbose = xflag.boolean("v", usage="print the copied payload")
count = xflag.integer("n", 1, usage="`times` to repeat the payload")
pos = xflag.pos()
source = pos.infile("src", usage="file to read (- for stdin)")
targets = pos.outfiles("dst", usage="files to write (- for stdout)")
pos.order("src [dst...]")


if __name__ == '__main__':
    xflag.parse()
    with source:
        payload = source.read() * count.value
    for target in targets:
        with target:
            target.write(payload)
    if verbose.value:
        pprint({"src": source.name, "dst": len(targets), "payload": payload})
