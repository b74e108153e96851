from budget_tracker.main import main

raise SystemExit(main())
