from splint.cli import main

raise SystemExit(main())
