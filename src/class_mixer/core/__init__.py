"""
Core Composition Engine.

Reflection collaborators (``schema``, ``provider``, ``inspector``), the
composition stages (``inventory``, ``combinator``, ``weaver``, ``synthesizer``,
``fields``, ``emitter``), the declarative definition format (``dsl``) and the
activation façade (``activation``).
"""
