from rpi_kernel_builder.kernel_builder import main

raise SystemExit(main())
