"""
Engine - ABI-driven execution of one contract's declared methods.

- synth:    argument values per declared parameter type
- dispatch: read query vs. signed transaction
- pipeline: ordered, failure-tolerant run over the schema
- report:   outcome aggregation and the report file
"""
