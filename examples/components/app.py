"""Reusable components -- includes, props and slots.

A component is an ordinary template. Include it with
``<template include="...">`` or register a tag for it, pass props as
attributes, and fill its ``<slot>`` elements with the include site's
children. ``<template #name="props">`` fills a named slot and receives
the props the component binds on it.

Run:
    python app.py
"""

from pathlib import Path

from vuepy import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
env = Environment(loader=FileSystemLoader(str(templates_dir)))

# <alert> tags render components/alert.html
env.register_component("alert", "components/alert.html")

template = env.get_template("page.html")

output = template.render(
    title="Component Demo",
    features=[
        {"name": "Directives", "desc": "v-if, v-for, v-show and bindings"},
        {"name": "Thread-safe", "desc": "Parsed trees are shared, never mutated"},
        {"name": "Layouts", "desc": "Front matter picks the wrapping layout"},
    ],
    warning_message="This is an alpha release. API may change.",
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
