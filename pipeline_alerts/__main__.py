import sys

from pipeline_alerts.bootstrap import main

sys.exit(main())
