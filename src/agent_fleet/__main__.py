from agent_fleet.cli import main

raise SystemExit(main())
