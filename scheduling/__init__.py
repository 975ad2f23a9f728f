"""
Class scheduling for sports clubs: recurring class generation and calendar layout.
"""
