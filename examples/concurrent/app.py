"""Concurrent rendering -- one parsed template, 8 threads.

Parsed templates are shared and never mutated. Each render builds its own
scope stack and output tree inside its own RenderContext (a ContextVar),
so simultaneous renders never see each other's data.

Run:
    python app.py
"""

from concurrent.futures import ThreadPoolExecutor

from vuepy import Environment

env = Environment()

# Each thread renders the same template with different context
TEMPLATE_SOURCE = """\
<article :id="page_id">
  <h1>{{ title }}</h1>
  <ul>
    <li v-for="tag in tags">{{ tag }}</li>
  </ul>
</article>"""

template = env.from_string(TEMPLATE_SOURCE)

pages = [
    {
        "page_id": f"page-{i}",
        "title": f"Page {i}",
        "tags": [f"tag-{i}-a", f"tag-{i}-b", f"tag-{i}-c"],
    }
    for i in range(8)
]


def render_page(page: dict) -> str:
    """Render a single page -- called from a worker thread."""
    return template.render(**page)


with ThreadPoolExecutor(max_workers=8) as pool:
    results = list(pool.map(render_page, pages))

output = "\n".join(results)


def main() -> None:
    print(f"Rendered {len(results)} pages across 8 threads:\n")
    for i, html in enumerate(results):
        print(f"--- Thread {i} ---")
        print(html)
        print()


if __name__ == "__main__":
    main()
