import sys

from vacancy_bot.main import main

sys.exit(main())
