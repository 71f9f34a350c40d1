from pdfmo.cli import main

raise SystemExit(main())
