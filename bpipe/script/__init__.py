"""Pipeline script language: parsing, binding and execution.

  - preprocess.py: Remove comments from script text.
  - grammar.py: Parse script text into stages, variables and a run tree.
  - binding.py: Resolve stage references and substitute variables.
  - execution.py: Run bound command lines stage by stage.
"""
