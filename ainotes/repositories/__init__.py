# Note stores package
