import os
import sys

# Make the project importable when the tests run from a plain checkout
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
