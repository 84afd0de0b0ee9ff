"""Layouts -- front matter and layout chains.

A page names its layout in YAML front matter. The layout renders with the
page's data plus ``content``, the rendered page body, and may itself name
a layout. Pages without front matter get the environment's default layout
(``layouts/base``) when it exists. ``<template #head>`` in a page fills the
layout's ``<slot name="head">``.

Run:
    python app.py
"""

from pathlib import Path

from vuepy import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
env = Environment(loader=FileSystemLoader(str(templates_dir)))

site = {
    "name": "vuepy blog",
    "nav": [
        {"title": "Home", "url": "/"},
        {"title": "Blog", "url": "/blog/"},
        {"title": "About", "url": "/about/"},
    ],
}

post = env.render(
    "blog/hello.html",
    site=site,
    url="/blog/",
    paragraphs=["Layouts wrap pages.", "Front matter picks them."],
)

about = env.render("about.html", site=site, url="/about/")


def main() -> None:
    print(post)
    print()
    print(about)


if __name__ == "__main__":
    main()
