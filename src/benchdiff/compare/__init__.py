"""Cross-revision benchmark comparison for benchdiff.

Builds the benchmark harnesses of two revisions, runs every case once per
revision with as few checkouts as the greedy schedule allows, and compares
the resulting estimates with an interval-overlap significance test.
"""
