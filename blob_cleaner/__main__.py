from blob_cleaner.main import main

raise SystemExit(main())
