#!/usr/bin/env python3
"""Profile the tokenizer to find performance bottlenecks."""

import cProfile
import io
import pstats

from htmllex import tokenize

# Sample markup
html = """
<html>
<head><title>Test</title></head>
<body>
    <div class="container">
        <p>Paragraph 1</p>
        <p>Paragraph 2</p>
        <table>
            <tr><td id="c1">Cell 1</td><td id="c2">Cell 2</td></tr>
            <tr><td id="c3">Cell 3</td><td id='c4'>Cell 4</td></tr>
        </table>
    </div>
</body>
</html>
""" * 100  # Repeat for more meaningful results

# Profile
pr = cProfile.Profile()
pr.enable()

for _ in range(10):
    tokens = tokenize(html)

pr.disable()

print(f"{len(tokens)} tokens per run")

# Print stats
s = io.StringIO()
ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
ps.print_stats(30)  # Top 30 functions
print(s.getvalue())
