from .backend import main

raise SystemExit(main())
