from gearledger.cli import main

raise SystemExit(main())
