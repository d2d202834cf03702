from enumkit.cli import main

raise SystemExit(main())
