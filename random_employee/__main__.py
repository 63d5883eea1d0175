"""Allow `python -m random_employee`."""

import sys

from random_employee.main import main

sys.exit(main())
