"""Scanner, parser, resolver and evaluator. Nothing in here prints except the evaluator's print statement."""
