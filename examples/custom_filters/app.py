"""Custom filters -- extending vuepy with add_filter and @env.filter().

Filter parameters are annotated; template values are converted to the
annotated types before the call, and a value that cannot be converted
fails with a FilterArgumentError instead of rendering a zero.

Run:
    python app.py
"""

from vuepy import DictLoader, Environment

TEMPLATES = {
    "invoice.html": """\
<table class="invoice">
  <tr v-for="item in items">
    <td>{{ item.name }}</td>
    <td>{{ item.qty }} {{ item.qty | pluralize("unit", "units") }}</td>
    <td>{{ item.price | times(item.qty) | money }}</td>
  </tr>
</table>
<p class="total">Total: {{ total | money }} ({{ total | money("€") }})</p>
<p>{{ item_count }} {{ item_count | pluralize("item", "items") }}</p>""",
}

env = Environment(loader=DictLoader(TEMPLATES))


# Custom filter: add_filter()
def money(amount: float, currency: str = "$") -> str:
    """Format amount as currency."""
    return f"{currency}{amount:,.2f}"


env.add_filter("money", money)


# Custom filter: @env.filter() decorator
@env.filter()
def pluralize(n: int, singular: str, plural: str) -> str:
    """Return singular or plural form based on count."""
    return singular if n == 1 else plural


@env.filter()
def times(value: float, factor: float) -> float:
    return value * factor


template = env.get_template("invoice.html")

output = template.render(
    total=1234.56,
    item_count=3,
    items=[
        {"name": "Widget A", "price": 19.99, "qty": 2},
        {"name": "Widget B", "price": "5.00", "qty": "1"},
    ],
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
