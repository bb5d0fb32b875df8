#!/usr/bin/env python3
"""
Random fuzzer for the tokenizer.
Generates malformed markup and checks that every run stays well-behaved.
"""

import argparse
import random
import string
import sys
import time
import traceback

from htmllex import TokenKind, TokenizerOpts, tokenize

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "th", "ul", "ol", "li",
    "form", "input", "button", "select", "option", "head", "body", "html", "title",
    "h1", "h2", "h3", "pre", "code", "section", "article", "header", "footer", "nav",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "name", "value", "type",
    "data-x", "aria-label", "role", "tabindex", "hidden",
]

SPECIAL_CHARS = [
    "\x00", "\x0b", "\x0c", "\x7f",  # Control chars
    "\ufffd",  # Replacement character
    "\u00a0",  # Non-breaking space
    "\u2028", "\u2029",  # Line/paragraph separators
    "\u200b",  # Zero-width space
    "\ufeff",  # BOM
]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_whitespace():
    """Generate random whitespace (including weird ones)."""
    ws = [" ", "\t", "\n", "\r", "\f", "\v", "\u00a0", ""]
    return "".join(random.choices(ws, k=random.randint(0, 5)))


def fuzz_tag_name():
    """Generate malformed tag names."""
    strategies = [
        lambda: random.choice(TAGS),  # Valid tag
        lambda: random.choice(TAGS).upper(),  # Uppercase
        lambda: random.choice(TAGS) + random_string(1, 5),  # Tag with suffix
        lambda: random_string(1, 10),  # Random string
        lambda: "",  # Empty
        lambda: random.choice(SPECIAL_CHARS) + random.choice(TAGS),  # Special prefix
        lambda: random.choice(TAGS) + "/" + random.choice(TAGS),  # Slash in name
        lambda: " " + random.choice(TAGS),  # Space prefix
    ]
    return random.choice(strategies)()


def fuzz_attribute():
    """Generate malformed attributes."""
    name_strategies = [
        lambda: random.choice(ATTRIBUTES),
        lambda: random_string(1, 15),
        lambda: "",
        lambda: random.choice(SPECIAL_CHARS),
        lambda: "=",
        lambda: '"',
        lambda: ">",
    ]

    value_strategies = [
        lambda: random_string(0, 50),
        lambda: "<b>bold</b>",
        lambda: random.choice(SPECIAL_CHARS) * random.randint(1, 10),
        lambda: "\n" * random.randint(1, 5) + random_string(),
        lambda: "",
        lambda: "x" * random.randint(100, 1000),  # Long value
    ]

    quote_styles = [
        ('="', '"'),
        ("='", "'"),
        ("=", ""),  # Unquoted
        (' "', '"'),  # Space instead of equals
        ("", ""),  # No value
        ('="', ""),  # Unclosed quote
        ("='", '"'),  # Mismatched quotes
        ("==", ""),  # Double equals
    ]

    name = random.choice(name_strategies)()
    value = random.choice(value_strategies)()
    quote_start, quote_end = random.choice(quote_styles)

    return f"{name}{quote_start}{value}{quote_end}"


def fuzz_open_tag():
    """Generate malformed opening tags."""
    tag = fuzz_tag_name()
    attrs = [fuzz_attribute() for _ in range(random.randint(0, 5))]
    attr_str = " ".join(attrs)
    ws = random_whitespace()

    closings = [">", "/>", " >", "/ >", "", ">>", "/>>", ">/"]
    closing = random.choice(closings)

    openings = ["<", "< ", "<<", "</"]
    opening = random.choice(openings) if random.random() < 0.2 else "<"

    return f"{opening}{tag}{' ' if attr_str else ''}{attr_str}{ws}{closing}"


def fuzz_close_tag():
    """Generate malformed closing tags."""
    tag = fuzz_tag_name()
    variants = [
        f"</{tag}>",
        f"</ {tag}>",
        f"</{tag} >",
        f"</{tag}",  # Unclosed
        f"</{tag}/>",
        f"<//{tag}>",  # Double slash
        f"</{tag} garbage>",
    ]
    return random.choice(variants)


def fuzz_text():
    """Generate text runs."""
    strategies = [
        lambda: random_string(1, 40),
        lambda: random_whitespace() + random_string(1, 10) + random_whitespace(),
        lambda: "".join(random.choices(SPECIAL_CHARS, k=random.randint(1, 5))),
        lambda: "a > b",
        lambda: "",
    ]
    return random.choice(strategies)()


def fuzz_nested_structure(depth=0, max_depth=10):
    """Generate well-formed nesting with random content."""
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    attrs = "".join(f' {random.choice(ATTRIBUTES)}="{random_string()}"' for _ in range(random.randint(0, 3)))
    inner = "".join(fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(1, 3)))
    return f"<{tag}{attrs}>{inner}</{tag}>"


def generate_fuzzed_html():
    """Generate one random document."""
    parts = []
    for _ in range(random.randint(1, 20)):
        strategy = random.choice([
            fuzz_open_tag,
            fuzz_close_tag,
            fuzz_text,
            fuzz_nested_structure,
            random_whitespace,
        ])
        parts.append(strategy())
    return "".join(parts)


def check_tokens(tokens, opts):
    """Return a description of the first broken run invariant, or None."""
    terminals = [index for index, token in enumerate(tokens) if token.is_terminal]
    if len(terminals) > 1:
        return f"{len(terminals)} terminal tokens"
    if terminals and terminals[0] != len(tokens) - 1:
        return "terminal token is not last"
    if not terminals:
        # Only the self-closing slash may stop a run without a terminal token.
        if opts.resume_after_self_closing or not tokens or tokens[-1].kind != TokenKind.START_TAG:
            return "run ended without a terminal token"
    for token in tokens:
        if token.kind == TokenKind.TEXT and not token.value:
            return "empty text token"
        if token.kind == TokenKind.START_TAG and token.value != token.value.translate(_ASCII_LOWER):
            return f"start tag {token.value!r} not case-folded"
    return None


_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False, opts=None):
    """Run the fuzzer against the tokenizer."""
    if seed is not None:
        random.seed(seed)
    opts = opts or TokenizerOpts()

    crashes = []
    violations = []
    hangs = []
    successes = 0

    print(f"Fuzzing tokenizer with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            tokens = tokenize(html, opts)
            elapsed = time.perf_counter() - start
        except Exception as e:
            crashes.append({
                "test_num": i,
                "html": html,
                "error": str(e),
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
            continue

        problem = check_tokens(tokens, opts)
        if problem:
            violations.append({"test_num": i, "html": html, "error": problem})
            if verbose:
                print(f"  VIOLATION: Test {i}: {problem}")
        elif elapsed > 1.0:
            hangs.append({"test_num": i, "html": html, "time": elapsed})
            if verbose:
                print(f"  HANG: Test {i} took {elapsed:.2f}s")
        else:
            successes += 1

    elapsed_total = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("FUZZING RESULTS")
    print(f"{'=' * 60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Violations:     {len(violations)}")
    print(f"Hangs (>1s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    if elapsed_total:
        print(f"Tests/second:   {num_tests / elapsed_total:.1f}")

    failures = crashes + violations
    if failures:
        print(f"\n{'=' * 60}")
        print("FAILURE DETAILS:")
        print(f"{'=' * 60}")
        for failure in failures[:10]:
            print(f"\nTest #{failure['test_num']}:")
            print(f"  HTML: {failure['html'][:200]!r}...")
            print(f"  Error: {failure['error']}")
        if len(failures) > 10:
            print(f"\n... and {len(failures) - 10} more failures")

    if save_failures and (failures or hangs):
        filename = f"fuzz_failures_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8") as f:
            f.write(f"Seed: {seed}\n\n")
            for failure in failures:
                f.write(f"=== FAILURE #{failure['test_num']} ===\n")
                f.write(f"HTML:\n{failure['html']}\n")
                f.write(f"Error: {failure['error']}\n")
                if "traceback" in failure:
                    f.write(f"Traceback:\n{failure['traceback']}\n")
                f.write("\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"HTML:\n{hang['html']}\n\n")
        print(f"\nFailures saved to {filename}")

    return not failures and not hangs


def main():
    parser = argparse.ArgumentParser(description="Fuzz the tokenizer with malformed markup")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--resume-after-self-closing",
        action="store_true",
        help="Fuzz with the corrected self-closing behaviour",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed documents (no tokenizing)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i + 1} ===")
            print(generate_fuzzed_html())
            print()
        return

    opts = TokenizerOpts(resume_after_self_closing=args.resume_after_self_closing)
    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
        opts=opts,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
