from __future__ import annotations

import pytest

from vuepy import DictLoader, Environment

TEMPLATES = {
    "minimal.html": "<p>{{ name }}</p>",
    "small.html": """\
<h1>{{ title | upper }}</h1>
<ul><li v-for="(item, i) in items" :class="{odd: i == 1}">{{ item }}</li></ul>""",
    "medium.html": """\
<table>
  <tr v-for="row in rows" :class="{active: row.active}">
    <td>{{ row.id }}</td>
    <td v-if="row.active">{{ row.name | title }}</td>
    <td v-else>{{ row.name | default("-") }}</td>
    <td :style="{width: row.width}">{{ row.score | string }}</td>
  </tr>
</table>""",
    "card.html": '<template :required="title"><div class="card"><h3>{{ title }}</h3><slot></slot></div></template>',
    "components.html": """\
<section>
  <template v-for="row in rows" include="card.html" :title="row.name"><p>{{ row.id }}</p></template>
</section>""",
    "layouts/base.html": "<html><body>{{ content }}</body></html>",
    "page.html": "---\nlayout: base\ntitle: Page\n---\n<h1>{{ title }}</h1><p v-for=\"n in count\">{{ n }}</p>",
}


@pytest.fixture(scope="session")
def vuepy_env() -> Environment:
    return Environment(loader=DictLoader(TEMPLATES))


@pytest.fixture(scope="session")
def small_context() -> dict[str, object]:
    return {"title": "benchmark", "items": [f"item {i}" for i in range(5)]}


@pytest.fixture(scope="session")
def medium_context() -> dict[str, object]:
    return {
        "rows": [
            {"id": i, "name": f"row {i}", "active": i % 3 == 0, "width": f"{i}px", "score": i / 7}
            for i in range(100)
        ]
    }


@pytest.fixture(scope="session")
def templates() -> dict[str, str]:
    return TEMPLATES
