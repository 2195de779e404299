"""Simple profiling of template compilation, rendering and file regeneration."""

from __future__ import annotations

import timeit
import tracemalloc

from litgen import RegenConfig, TextBuilder, compile_template, render, rewrite_source
from litgen.template import Template


def _build_source(blocks: int) -> str:
    parts: list[str] = []
    for i in range(blocks):
        parts.append(
            "/*!!\n"
            "row = template('case `i`: return \"`name`\";')\n"
            f"for i in range({i + 10}):\n"
            "    row(i=i, name=f'item{i}')\n"
            "    nl()\n"
            "!! 4 */\n"
        )
    return "".join(parts)


def main() -> None:
    def _compile() -> None:
        compile_template.cache_clear()
        compile_template("<li>`it`</li> `a` and `b`")

    duration: float = timeit.timeit(_compile, number=1000)
    print(f"Template compile: {duration:.4f}s/1000")

    tpl: Template = compile_template("<li>`it`</li>")

    def _render() -> None:
        b = TextBuilder()
        for n in range(100):
            render(tpl, {"it": n}, b)
            b.nl()
        b.finish()

    rendered: float = timeit.timeit(_render, number=100)
    print(f"Render 100 rows: {rendered:.4f}s/100")

    src: str = _build_source(20)
    config = RegenConfig()
    regen: float = timeit.timeit(lambda: rewrite_source(src, config), number=10)
    print(f"rewrite_source (20 blocks): {regen:.4f}s/10")

    tracemalloc.start()
    rewrite_source(_build_source(50), config)
    current: int
    peak: int
    current, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()
    print(f"Regeneration memory: current={current} bytes peak={peak} bytes")


if __name__ == "__main__":
    main()
