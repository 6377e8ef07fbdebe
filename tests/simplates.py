"""Sample page-resources shared by the test modules."""

from pathlib import Path

RENDERED_TXT = """
import time
from dataclasses import dataclass


@dataclass
class RDance:
    who: str
    when: float
\f
ctx["D"] = RDance(who="Everybody", when=time.time())
\f
{{ D.who }} Dance {{ D.when }}!
"""

STATIC_TXT = """
Everybody Dance Now!
"""

JSON_RESOURCE = """
import time


class JDance:
    def __init__(self, who, when):
        self.who = who
        self.when = when
\f
ctx["D"] = JDance("Everybody", time.time())
response.set_body({"who": ctx["D"].who})
"""

NEGOTIATED = """
import time


class NDance:
    def __init__(self, who, when):
        self.who = who
        self.when = when
\f
ctx["D"] = NDance("Everybody", time.time())
\f text/plain
{{ D.who }} Dance {{ D.when }}!
\f application/json
{"who": "{{ D.who }}", "when": "{{ D.when }}"}
"""

# relative path -> content; 3 generated resources, 2 statics
SITE_FILES = {
    "hams/bone/derp": NEGOTIATED,
    "shill/cans.txt": RENDERED_TXT,
    "hat/v.json": JSON_RESOURCE,
    "silmarillion.handlebar.mustache.moniker.html": "<html>INVALID AS BUTT</html>",
    "Big CMS/Owns_UR Contents/flurb.txt": STATIC_TXT,
}


def write_site(root: Path, files: dict[str, str | bytes]) -> Path:
    """Write *files* below *root* and return *root*."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root
