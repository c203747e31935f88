"""Remove comments from pipeline script text before parsing.
"""


def strip_comments(text):
    """Remove /* ... */ block comments and // line comments.

    Block comments are removed first, each from the first `/*` to the first
    `*/`, then line comments up to the end of their line. Quoting is not
    taken into account.
    """
    while True:
        cstart = text.find("/*")
        cend = text.find("*/")
        if cstart < 0 or cend < 0:
            break
        if cend < cstart:
            # a stray closing marker ahead of the next comment
            cend = text.find("*/", cstart + 2)
            if cend < 0:
                break
        text = text[:cstart] + text[cend + 2:]
    while True:
        cstart = text.find("//")
        if cstart < 0:
            break
        cend = text.find("\n", cstart)
        if cend < 0:
            cend = len(text)
        text = text[:cstart] + text[cend:]
    return text
