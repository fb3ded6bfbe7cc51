from systemd_check.main import main

raise SystemExit(main())
